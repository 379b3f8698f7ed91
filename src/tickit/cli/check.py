"""Handler for 'tickit check' command."""

from tickit.api.connection import ConnectionStatus, check_connection
from tickit.cli._common import error, output_result, run


def check(args) -> int:
    """Validate config and prove the tracker accepts our credentials."""

    async def op(client, config):
        status, detail = await check_connection(client, config.settings["jql"])
        if status is not ConnectionStatus.CONNECTED:
            message = status.message(detail)
            if status is not ConnectionStatus.UNKNOWN_ERROR and detail:
                message = f"{message} ({detail})"
            error(message, args.json)
        output_result(
            {"status": status.value, "instance": config.instance},
            f"Connected to {config.instance} as {config.username}",
            args.json,
        )
        return 0

    return run(args, op)
