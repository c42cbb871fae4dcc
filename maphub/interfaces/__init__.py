"""MapHub Interfaces

This package contains the abstract processor interface and the standard
result and status models shared by inventory modules.
"""

from .module_processor import ModuleProcessor, ProcessingResult, ModuleStatus

__all__ = ['ModuleProcessor', 'ProcessingResult', 'ModuleStatus']
