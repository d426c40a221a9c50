from fastapi import Request

from magic_code.application.strategy import MagicCodeStrategy


def get_strategy(request: Request) -> MagicCodeStrategy:
    # This is set in magic_code.main lifespan()
    return request.app.state.strategy
