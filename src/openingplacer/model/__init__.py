"""
The MODEL layer contains pure data structures.
It has NO knowledge of any host application or spatial index.
It deals with Geometry, element records and I/O.
"""
