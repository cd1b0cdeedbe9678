#!/usr/bin/env python3
"""
Mock upstream server for trying out reachability checks by hand.

Routes:
- /status/{code}: answers with the given HTTP status code
- /delay/{seconds}: answers 200 after the given number of seconds
- /redirect/{code}: redirects to /status/{code}
- anything else: 200 OK

Start it, then for example:
    reachability-check http://localhost:8080/status/403
    reachability-check http://localhost:8080/delay/10
"""

import asyncio

from aiohttp import web

# Constants
PORT = 8080
HOST = "localhost"
MAX_DELAY_S = 60


async def handle_status(request: web.Request) -> web.Response:
    """
    Answer with the status code taken from the path.

    Args:
        request: The incoming HTTP request

    Returns:
        A plain-text response with the requested status code
    """
    code = int(request.match_info["code"])
    return web.Response(status=code, text=f"status {code}")


async def handle_delay(request: web.Request) -> web.Response:
    """Answer 200 after sleeping for the number of seconds taken from the path."""
    delay_s = min(float(request.match_info["seconds"]), MAX_DELAY_S)
    await asyncio.sleep(delay_s)
    return web.Response(text=f"waited {delay_s}s")


async def handle_redirect(request: web.Request) -> web.Response:
    raise web.HTTPFound(f"/status/{request.match_info['code']}")


async def handle_request(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def init_app() -> web.Application:
    """
    Initialize the web application.

    Returns:
        Configured aiohttp web Application
    """
    app = web.Application()
    app.add_routes(
        [
            web.route("*", r"/status/{code:\d{3}}", handle_status),
            web.route("*", r"/delay/{seconds:\d+(\.\d+)?}", handle_delay),
            web.route("*", r"/redirect/{code:\d{3}}", handle_redirect),
            web.route("*", "/{tail:.*}", handle_request),
        ]
    )
    return app


def run_server() -> None:
    """Run the mock server on HOST:PORT."""
    web.run_app(init_app(), host=HOST, port=PORT)


if __name__ == "__main__":
    print(f"Starting mock server at http://{HOST}:{PORT}")
    run_server()
