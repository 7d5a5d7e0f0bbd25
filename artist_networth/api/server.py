from __future__ import annotations
from flask import Flask, request, jsonify, Response

from artist_networth.config.env import get_networth_config
from artist_networth.exports.writers import write_networth
from artist_networth.networth.slots import SlotBoard, parse_artist_list

import logging
import os
import time
from collections import deque, defaultdict

logger = logging.getLogger(__name__)

app = Flask(__name__)

BOARD: SlotBoard | None = None


def get_board() -> SlotBoard:
    global BOARD
    if BOARD is None:
        BOARD = SlotBoard()
    return BOARD

# Configuration helpers (overridable via app.config in tests)

def _get_api_key() -> str | None:
    if 'API_KEY' in app.config:
        return app.config.get('API_KEY')
    return os.environ.get('API_KEY')


def _get_rate_limit() -> tuple[int, float]:
    n = app.config.get('RATE_LIMIT_N')
    w = app.config.get('RATE_LIMIT_WINDOW_SEC')
    if n is None:
        n = int(os.environ.get('RATE_LIMIT_N', '10'))
    if w is None:
        w = float(os.environ.get('RATE_LIMIT_WINDOW_SEC', '1.0'))
    return int(n), float(w)


def _get_cors_origin() -> str | None:
    if 'CORS_ALLOW_ORIGIN' in app.config:
        return app.config.get('CORS_ALLOW_ORIGIN')
    return os.environ.get('CORS_ALLOW_ORIGIN', '*') or None


def _lookup_timeout() -> float:
    return float(app.config.get('LOOKUP_TIMEOUT_SEC') or get_networth_config().lookup_timeout_sec)

_recent: dict[str, deque[float]] = defaultdict(lambda: deque(maxlen=100))


def _client_ip() -> str:
    xff = request.headers.get('X-Forwarded-For')
    if xff:
        return xff.split(',')[0].strip()
    return request.remote_addr or 'anon'


def _check_api_key():
    api_key = _get_api_key()
    if api_key:
        provided = request.headers.get('X-API-Key')
        if provided != api_key:
            return jsonify({'error': 'unauthorized'}), 401
    return None


def _check_rate_limit(ip: str):
    # Allow if rate limiting disabled or N <= 0
    n, window = _get_rate_limit()
    if n <= 0:
        return None
    now = time.time()
    dq = _recent[ip]
    while dq and now - dq[0] > window:
        dq.popleft()
    if len(dq) >= n:
        retry = max(0.0, window - (now - dq[0]))
        resp = jsonify({'error': 'rate_limited'})
        resp.status_code = 429
        resp.headers['Retry-After'] = f"{retry:.2f}"
        return resp
    dq.append(now)
    return None


def _starts_lookup() -> bool:
    # Only requests that may reach Wikidata count against the limit
    if request.path.startswith('/networth'):
        return request.method == 'GET'
    return request.path.startswith('/slots/') and request.method == 'PUT'


@app.before_request
def _auth_and_rate_limit():
    if request.method == 'OPTIONS':
        return None
    if request.path.startswith('/networth') or request.path.startswith('/slots'):
        unauthorized = _check_api_key()
        if unauthorized is not None:
            return unauthorized
        if _starts_lookup():
            rl = _check_rate_limit(_client_ip())
            if rl is not None:
                return rl
    return None


@app.after_request
def _cors(resp):
    origin = _get_cors_origin()
    if origin:
        resp.headers['Access-Control-Allow-Origin'] = origin
        resp.headers['Access-Control-Allow-Headers'] = 'Content-Type, X-API-Key'
        resp.headers['Access-Control-Allow-Methods'] = 'GET, PUT, DELETE, OPTIONS'
    return resp


def _lookup(names: list[str]):
    # None when the lookups did not finish in time; they are cancelled by then
    try:
        return get_board().lookup_many_sync(names, timeout=_lookup_timeout())
    except TimeoutError:
        return None


def _requested_names() -> tuple[str | None, list[str]]:
    single = (request.args.get('name') or '').strip()
    if single:
        return single, [single]
    return None, parse_artist_list(request.args.get('names'))


@app.get('/networth')
def get_networth():
    single, names = _requested_names()
    if not names:
        return jsonify({'error': 'name or names is required'}), 400
    results = _lookup(names)
    if results is None:
        return jsonify({'error': 'timeout'}), 504
    if single is not None:
        name, state = results[0]
        return jsonify({'name': name, **state.to_dict()})
    return jsonify({'results': [{'name': n, **s.to_dict()} for n, s in results]})


@app.get('/networth.csv')
def get_networth_csv():
    _, names = _requested_names()
    if not names:
        return jsonify({'error': 'name or names is required'}), 400
    results = _lookup(names)
    if results is None:
        return jsonify({'error': 'timeout'}), 504
    return Response(write_networth(results), mimetype='text/csv', headers={
        'Content-Disposition': 'attachment; filename="networth.csv"'
    })


@app.put('/slots/<slot_id>')
def put_slot(slot_id: str):
    payload = request.get_json(force=True, silent=True) or {}
    name = payload.get('name')
    if name is not None and not isinstance(name, str):
        return jsonify({'error': 'name must be a string'}), 400
    slot = get_board().slot(slot_id)
    state = slot.set_name(name)
    return jsonify({'slot_id': slot_id, 'name': slot.name, **state.to_dict()})


@app.get('/slots/<slot_id>')
def get_slot(slot_id: str):
    slot = get_board().slot(slot_id, create=False)
    if slot is None:
        return jsonify({'error': 'not_found'}), 404
    return jsonify({'slot_id': slot_id, 'name': slot.name, **slot.state.to_dict()})


@app.delete('/slots/<slot_id>')
def delete_slot(slot_id: str):
    if not get_board().remove(slot_id):
        return jsonify({'error': 'not_found'}), 404
    return jsonify({'slot_id': slot_id, 'status': 'removed'})


@app.get('/slots')
def list_slots():
    board = get_board()
    out = []
    for sid in board.slot_ids():
        slot = board.slot(sid, create=False)
        if slot is not None:
            out.append({'slot_id': sid, 'name': slot.name, **slot.state.to_dict()})
    return jsonify({'slots': out})


if __name__ == '__main__':
    logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO'))
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', '8000')))
