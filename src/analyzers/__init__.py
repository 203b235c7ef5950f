from .cookstyle import CookstyleAnalyzer, parse_cookstyle_output

__all__ = ["CookstyleAnalyzer", "parse_cookstyle_output"]
