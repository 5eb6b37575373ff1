"""
Collaborator clients: generation gateway and web search
"""
from .ai_gateway import AIGatewayProvider
from .firecrawl import WebContextFetcher

__all__ = ['AIGatewayProvider', 'WebContextFetcher']
