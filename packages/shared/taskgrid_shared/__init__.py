"""Schemas shared between the taskgrid server and its clients."""
