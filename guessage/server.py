"""Process entry point: validate the port, serve, and wait for ``stop``."""

import sys
import threading

from werkzeug.serving import make_server

USAGE = 'Usage run.py [portNumber]\n'
PROMPT = "Type 'stop' to shutdown the server: "


def parse_port(args):
    """Return the port from ``args`` (argv without the program name), or None if invalid.

    Exactly one argument is accepted and it must be a four-digit integer.
    """
    if len(args) != 1:
        return None
    raw = args[0]
    if len(raw) != 4 or not (raw.isascii() and raw.isdigit()):
        return None
    return int(raw)


def command_loop(stdin, stdout, on_stop):
    """Read commands until ``stop`` (or end of input), then call ``on_stop``."""
    stdout.write(PROMPT)
    stdout.flush()
    for line in stdin:
        command = line.strip().lower()
        if command == 'stop':
            stdout.write('Shutting down the server\n')
            stdout.flush()
            break
        stdout.write(f'Invalid command: {command}\n')
        stdout.write(PROMPT)
        stdout.flush()
    on_stop()


def serve(flask_app, argv=None, stdin=None, stdout=None):
    """Run ``flask_app`` on the port given in ``argv``; returns the exit code."""
    argv = sys.argv[1:] if argv is None else argv
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    port = parse_port(argv)
    if port is None:
        stdout.write(USAGE)
        return 0

    try:
        server = make_server('localhost', port, flask_app, threaded=True)
    except OSError as exc:
        stdout.write(f'Could not start server on port {port}: {exc}\n')
        flask_app.logger.error(f"[server] bind failed on port {port}: {exc}")
        return 1
    worker = threading.Thread(target=server.serve_forever, name='http-server', daemon=True)
    worker.start()
    stdout.write(f'Web server started and running at http://localhost:{port}\n')
    flask_app.logger.info(f"[server] listening on port {port}")

    command_loop(stdin, stdout, server.shutdown)
    worker.join()
    flask_app.logger.info("[server] stopped")
    return 0
