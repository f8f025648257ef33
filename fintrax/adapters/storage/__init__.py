"""Persistence adapters.

Repositories follow the soft-delete convention: deleting a record sets its
status to ``Status.DELETED`` and every read filters such records out.
"""
