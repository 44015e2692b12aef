"""
The MODEL layer contains pure data structures: the scene tree, its entities,
selection state and persistence.
It has NO knowledge of the Visualization (PyVista).
"""
