"""
Adapters for the external collaborators of the NPS router.
"""
