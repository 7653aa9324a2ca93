"""Path patterns, route records, and the router tree.

Routes are registered during setup; each pattern is compiled the moment
its route is created and rebuilt whenever its router is mounted.
"""
