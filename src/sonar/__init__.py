"""
Sonar code-intelligence layer: exploration orchestrators, commands and shell.
"""
