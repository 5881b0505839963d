# umrah_core/editor_server.py
"""
Schema-validated data editor over HTTP.

Endpoints:
    GET    /api/data/<file>        current document
    POST   /api/data/<file>        replace the document (body: JSON)
    PUT    /api/data/<file>/<id>   insert or replace one entry
    DELETE /api/data/<file>/<id>   remove one entry
    GET    /api/schema/<file>      JSON Schema for the document

<file> is one of duas, themes, rounds.
"""
import argparse
import http.server
import json
import sys
import threading
from typing import Optional
from urllib.parse import unquote, urlparse

from colorama import Fore, Style, init

from umrah_core.config import AppSettings, load_settings
from umrah_core.editor_service import EditorService
from umrah_core.errors import ContentLoadError, EntryNotFoundError, UnknownFileKeyError
from umrah_core.models import WriteResult


def make_handler(service: EditorService, max_body_bytes: int = 5_000_000):
    """Build a request handler class bound to one EditorService."""

    class EditorRequestHandler(http.server.BaseHTTPRequestHandler):

        def _send_json(self, status: int, data):
            body = json.dumps(data, ensure_ascii=False).encode('utf-8')
            self.send_response(status)
            self.send_header('Content-Type', 'application/json; charset=utf-8')
            self.send_header('Content-Length', str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _not_found(self, message: str = "Not found"):
            self._send_json(404, {"error": message})

        def _parts(self):
            path = urlparse(self.path).path
            return [unquote(p) for p in path.split('/') if p]

        def _read_body(self):
            """Parse the JSON body; returns (ok, value). Error responses are sent here."""
            try:
                length = int(self.headers.get('Content-Length') or 0)
            except ValueError:
                length = -1
            if length < 0:
                self.close_connection = True
                self._send_json(400, {"error": "Invalid Content-Length header"})
                return False, None
            if length > max_body_bytes:
                # Drain the body so the client sees the response, not a reset
                remaining = length
                while remaining > 0:
                    chunk = self.rfile.read(min(remaining, 65536))
                    if not chunk:
                        break
                    remaining -= len(chunk)
                self._send_json(413, {"error": "Request body too large"})
                return False, None
            raw = self.rfile.read(length) if length else b''
            try:
                return True, json.loads(raw.decode('utf-8'))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                self._send_json(400, {"error": f"Invalid JSON body: {e}"})
                return False, None

        def _send_result(self, result: WriteResult):
            if result.ok:
                self._send_json(200, {"status": "ok"})
            else:
                self._send_json(400, {
                    "error": "Schema validation failed",
                    "details": [v.model_dump() for v in result.violations],
                })

        def _dispatch(self, method: str):
            parts = self._parts()
            try:
                if len(parts) < 3 or parts[0] != 'api' or parts[1] not in ('data', 'schema'):
                    return self._not_found()
                resource, file_key = parts[1], parts[2]
                entry_id = parts[3] if len(parts) == 4 else None
                if len(parts) > 4:
                    return self._not_found()

                if resource == 'schema':
                    if method != 'GET' or entry_id is not None:
                        return self._not_found()
                    return self._send_json(200, service.read_schema(file_key))

                if entry_id is None:
                    if method == 'GET':
                        return self._send_json(200, service.read(file_key))
                    if method == 'POST':
                        ok, document = self._read_body()
                        if ok:
                            self._send_result(service.write(file_key, document))
                        return
                elif method == 'PUT':
                    ok, fields = self._read_body()
                    if ok:
                        self._send_result(service.upsert_entry(file_key, entry_id, fields))
                    return
                elif method == 'DELETE':
                    return self._send_result(service.delete_entry(file_key, entry_id))
                return self._not_found()

            except (UnknownFileKeyError, EntryNotFoundError) as e:
                return self._not_found(str(e))
            except ContentLoadError as e:
                print(Fore.RED + f"❌ {e}", file=sys.stderr)
                return self._send_json(500, {"error": str(e)})
            except Exception as handler_e:
                print(Fore.RED + f"❌ HTTP Handler Error: {handler_e}", file=sys.stderr)
                return self._send_json(500, {"error": "Internal Server Error"})

        def do_GET(self):
            self._dispatch('GET')

        def do_POST(self):
            self._dispatch('POST')

        def do_PUT(self):
            self._dispatch('PUT')

        def do_DELETE(self):
            self._dispatch('DELETE')

        # Suppress standard request logging
        def log_message(self, format, *args):
            pass

    return EditorRequestHandler


class EditorServer:
    """Threaded HTTP server around an EditorService."""

    def __init__(self, service: EditorService, host: str = "127.0.0.1", port: int = 4000,
                 max_body_bytes: int = 5_000_000):
        self.service = service
        self.httpd = http.server.ThreadingHTTPServer((host, port), make_handler(service, max_body_bytes))
        self.httpd.daemon_threads = True
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        host, port = self.httpd.server_address[:2]
        return f"http://{host}:{port}"

    def start_in_thread(self):
        self._thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)
        self._thread.start()

    def serve_forever(self):
        self.httpd.serve_forever()

    def stop(self):
        self.httpd.shutdown()
        self.httpd.server_close()
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None


def parse_args(argv=None, settings: Optional[AppSettings] = None):
    settings = settings or AppSettings()
    parser = argparse.ArgumentParser(description="Schema-driven editor for the guide's data files")
    parser.add_argument('--host', default=settings.editor_host)
    parser.add_argument('--port', type=int, default=settings.editor_port)
    parser.add_argument('--data-dir', default=settings.data_dir)
    parser.add_argument('--schema-dir', default=settings.schema_dir)
    parser.add_argument('--strict-references', action='store_true', default=settings.strict_references,
                        help="Reject writes that reference unknown dua or theme ids")
    return parser.parse_args(argv)


def main(argv=None):
    init(autoreset=True)
    settings = load_settings()
    args = parse_args(argv, settings)
    service = EditorService(args.data_dir, args.schema_dir, strict_references=args.strict_references)
    try:
        server = EditorServer(service, args.host, args.port, settings.max_body_bytes)
    except OSError as e:
        print(Fore.RED + f"❌ Could not start data editor on {args.host}:{args.port}: {e}", file=sys.stderr)
        return 1
    print(f"{Fore.GREEN}Data editor running at {server.url}/{Style.RESET_ALL}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print(Fore.YELLOW + "\nStopping data editor...")
    finally:
        server.httpd.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
