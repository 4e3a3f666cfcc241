"""
gazeta - publishing core for a Romanian-language news site.

Diacritic-aware search expansion and the scheduled publication workflow
(read-triggered auto-publish plus deferred cache revalidation).
"""

__version__ = "0.1.0"
