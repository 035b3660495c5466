"""HTTP trigger blueprint: health check, tool catalog and tool calls."""

import json
import logging

import azure.functions as func

from sharepoint_mcp import __version__
from sharepoint_mcp.config import load_config
from sharepoint_mcp.errors import SharePointError
from sharepoint_mcp.graph.client import GraphApiError
from sharepoint_mcp.server.tools import TOOLS, ToolDispatcher

logger = logging.getLogger(__name__)

bp = func.Blueprint()


def _json_response(payload: object, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(payload, ensure_ascii=False),
        status_code=status_code,
        mimetype="application/json",
    )


def _error_response(error: str, message: str, status_code: int) -> func.HttpResponse:
    return _json_response(
        {"status": "error", "error": error, "message": message}, status_code=status_code
    )


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint returning service status and version."""
    logger.info("[health_check] health check requested")
    return _json_response({"status": "ok", "version": __version__})


@bp.route(route="tools", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def list_tools(req: func.HttpRequest) -> func.HttpResponse:
    """Return the tool catalog with each tool's input schema."""
    tools = [tool.model_dump(exclude_none=True) for tool in TOOLS]
    return _json_response({"tools": tools})


@bp.route(route="tools/{name}", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def call_tool(req: func.HttpRequest) -> func.HttpResponse:
    """Run a tool with the JSON request body as its arguments.

    Requires a function key. Classified failures keep their status code;
    other Graph failures are reported as 502.
    """
    name = req.route_params.get("name", "")
    logger.info("[call_tool] tool call requested; name:%s", name)

    try:
        arguments = req.get_json() if req.get_body() else {}
    except ValueError:
        return _error_response("InvalidArgumentsError", "Request body must be JSON", 400)
    if not isinstance(arguments, dict):
        return _error_response("InvalidArgumentsError", "Request body must be an object", 400)

    try:
        result = ToolDispatcher(load_config()).dispatch(name, arguments)
        return _json_response(result)

    except SharePointError as exc:
        logger.warning("[call_tool] tool call failed; name:%s;error:%s", name, type(exc).__name__)
        return _error_response(type(exc).__name__, exc.message, exc.status_code)

    except GraphApiError as exc:
        logger.error("[call_tool] Graph API error; name:%s;status:%d", name, exc.status_code)
        return _error_response("GraphApiError", str(exc), 502)

    except Exception:
        logger.error("[call_tool] tool call failed; name:%s", name, exc_info=True)
        return _error_response("InternalError", "Internal server error", 500)
