from __future__ import annotations

# Placeholders: {name} display name, {university} and {assistant} from settings.

WELCOME = "Hello {name}! I'm {assistant}, your intelligent academic assistant. How can I help you today?"

GREETINGS = (
    "Hello {name}! Great to see you here. I'm ready to help with your academic needs!",
    "Hi there {name}! How can I assist you with your {university} studies today?",
    "Hey {name}! I'm here to help with courses, grades, notes, schedules - anything you need!",
    "Good to see you {name}! What would you like to know about your academic progress?",
)

HELP = """Absolutely! I'm here to help with your {university} studies. 🎓

**Here's what I can do for you:**

📚 **Academic Info:**
• Show your course progress and details
• Check your grades and performance

📅 **Schedule & Events:**
• Today's events and deadlines
• Upcoming exams and assignments

📝 **Study Materials:**
• Find your notes by topic or course
• List your recent and favorite notes

📢 **Updates & News:**
• Latest announcements
• Unread notifications

Just ask me anything like "What's due today?" or "Show my current courses" and I'll help you out!"""

THANKS = "You're welcome, {name}! 😊 Anything else I can help you with?"

GENERIC_QUESTION = """Great question! 🤔 I want to give you the most helpful answer.

Here are some ways I can assist you:

🔍 **Search & Find:**
• "Find my notes about databases"
• "What assignments are due?"

📊 **Academic Status:**
• "How are my grades?"
• "What courses am I taking?"

📅 **Schedule Info:**
• "What's happening today?"
• "When is my next exam?"

Could you try rephrasing your question using one of these formats? I'm here to help! 😊"""

FALLBACKS = (
    "I'd love to help you, {name}! 😊 Ask me about courses, grades, events, notes, or announcements.",
    "Hi {name}! I'm your study buddy. 🤖\n\nTry asking me things like:\n"
    "• \"What's due this week?\"\n• \"Show my current courses\"\n"
    "• \"Any new announcements?\"\n• \"Find my database notes\"\n\nWhat can I help you with today?",
    "Ready to assist, {name}! 🎓 Popular requests:\n"
    "🗓️ \"What's happening today?\"\n📈 \"How am I doing in my courses?\"\n"
    "🔍 \"Find notes on algorithms\"\n📢 \"Any important updates?\"",
)

ESCALATION = """This question seems outside my scope. I'll forward it to a tutor for help. Meanwhile, I can assist with:
• Course info
• Grades & performance
• Notes & materials
• Calendar events
• Announcements

Would you like to know about any of these?"""

TICKET_CREATED = "I've created support ticket #{ticket_id}{course_suffix}. Staff will review it and get back to you soon."

TICKET_ESCALATED = (
    "This question seems outside my scope, so I've forwarded it to a tutor as ticket #{ticket_id}. "
    "Meanwhile, I can help with courses, grades, schedule, notes, or announcements."
)

TICKET_FAILED = (
    "Sorry, I couldn't forward your request to staff right now. "
    "Please try again in a few minutes or contact the help desk directly."
)
