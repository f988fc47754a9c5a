"""
Reminder subsystem.

Components:
- ledger.py: fired (task, trigger minute) keys for the current session
- evaluator.py: decides which reminders elapse at a given local time
- dispatcher.py: alarm / system notification / reminder popup side effects
- scheduler.py: polling loop + background thread runner
"""
