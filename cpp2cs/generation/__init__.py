"""C# regeneration from a reconciled conversion plan."""

from .files import FileRenderer, GeneratedFile, render_plan
from .types import TypeMapper

__all__ = ["FileRenderer", "GeneratedFile", "TypeMapper", "render_plan"]
