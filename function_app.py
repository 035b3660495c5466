"""Azure Functions app exposing the SharePoint tools over HTTP."""

import os
import sys

# The Functions runtime imports this file from the repository root; the
# package itself lives under src/.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import azure.functions as func

from sharepoint_mcp.functions.http_trigger import bp as http_bp

app = func.FunctionApp()
app.register_blueprint(http_bp)
