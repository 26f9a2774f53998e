from src.sonar.shell.shell import Shell

__all__ = ["Shell"]
