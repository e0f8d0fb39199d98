"""
Ladder game core: the game engine and its persistence collaborator.
"""
