from __future__ import annotations
import os, sys, logging
from flask import Flask, request, jsonify

# Make the launcharr package importable when run from a source checkout
_app_base = os.environ.get(
    "APP_BASE",
    os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "app"),
)
if _app_base not in sys.path:
    sys.path.insert(0, _app_base)

from launcharr.config import get_config, to_dict as config_to_dict, APP_VERSION
from launcharr.dispatcher import build_dispatcher

log = logging.getLogger("launcharr.host")

app = Flask(__name__)

_dispatcher = None


def dispatcher():
    """Process-wide dispatcher built lazily around the shared settings."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_dispatcher(get_config())
    return _dispatcher


def reset_dispatcher(new=None):
    global _dispatcher
    _dispatcher = new


@app.after_request
def _stamp_version(resp):
    resp.headers["X-Launcharr-Version"] = APP_VERSION
    return resp


# ===== Health ================================================================
@app.route("/health")
def health():
    return jsonify(ok=True, version=APP_VERSION)


# ===== Query API =============================================================
@app.get("/api/query")
def api_query():
    q = request.args.get("q", "")
    results = dispatcher().dispatch(q)
    return jsonify(query=q, results=[r.to_dict() for r in results])


@app.post("/api/activate")
def api_activate():
    data = request.get_json(silent=True) or {}
    if "index" not in data:
        return jsonify(error="Missing 'index' parameter"), 400
    try:
        index = int(data["index"])
    except (TypeError, ValueError):
        return jsonify(error="'index' must be an integer"), 400

    q = data.get("q", "")
    results = dispatcher().dispatch(q)
    if not 0 <= index < len(results):
        return jsonify(error=f"No result at index {index}", count=len(results)), 404

    chosen = results[index]
    if chosen.action is None:
        return jsonify(error="Result has no action", title=chosen.title), 400
    try:
        close = chosen.activate()
    except Exception as e:
        log.exception("Activation of %r failed", chosen.title)
        return jsonify(error=str(e), title=chosen.title), 500
    return jsonify(success=True, title=chosen.title, close=close)


@app.get("/api/status")
def api_status():
    return jsonify(dispatcher().ctx.probe.status.to_dict())


@app.get("/api/config")
def api_config():
    return jsonify(config_to_dict(dispatcher().settings))


if __name__ == "__main__":
    from launcharr.config import configure_logging
    cfg = get_config()
    configure_logging(cfg.log_level, cfg.log_file)
    app.run(host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8787")))
