"""
Cogs package for Vigil.

Each module defines a cog class and a ``setup(bot, verification_service)``
function. Cogs are loaded explicitly in main.py.
"""
