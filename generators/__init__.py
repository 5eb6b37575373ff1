"""
Generation orchestrators
"""
from .tabular import TabularGenerator
from .images import ImageGenerator

__all__ = ['TabularGenerator', 'ImageGenerator']
