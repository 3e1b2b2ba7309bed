"""
Member profiles.

A profile is the community-facing record of a person (children, youth or
adult), optionally linked to one login account.
"""
