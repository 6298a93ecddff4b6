"""pipeforge - CI workflow and access policy generation.

Core pieces:
- Stack scoring from repository file evidence
- Pipeline graph compilation into ordered workflow steps
- Access policy documents per deployment scope
"""

__version__ = "0.1.0"
