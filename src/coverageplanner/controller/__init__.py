"""
The CONTROLLER layer holds the algorithms that act on the scene model.
"""
