from tools.server import SERVER_NAME, create_server, run_stdio

__all__ = ["SERVER_NAME", "create_server", "run_stdio"]
