"""
Access control application.

Answers "can this principal see / edit / approve X?" for the HR workspace:
- Closed role model and immutable principals
- Declarative resource -> role tables
- Manager / direct-report visibility through an injected team directory
- Navigation filtering for workspace and platform menus
"""
