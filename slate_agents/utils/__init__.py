from slate_agents.utils.json_parser import JsonParser, ParseOutcome

__all__ = ["JsonParser", "ParseOutcome"]
