"""MapHub Processing Modules

This package contains the processing modules built on the MapHub core. Each
module implements the ModuleProcessor interface.
"""
