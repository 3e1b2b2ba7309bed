"""
Small groups and join requests.

Join requests start as pending; staff move them to approved.
"""
