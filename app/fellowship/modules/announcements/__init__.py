"""
Announcements and their comment threads.
"""
