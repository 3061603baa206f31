"""
In-memory host adapters: wall solids, a numpy spatial index and a scene model
implementing the engine's collaborator protocols.
"""
