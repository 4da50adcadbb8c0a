from flask import Blueprint, Response, current_app, request

from ..errors import LeaderboardError

bp = Blueprint('csv', __name__, url_prefix='/api/csv')


def _text(body: str, status: int, kind: str = None) -> Response:
    response = Response(body, status=status, mimetype='text/plain')
    if kind:
        response.headers['X-Error-Kind'] = kind
    return response


@bp.route('/import', methods=['POST'])
def import_csv():
    """Replace every game table with the players listed in an uploaded CSV."""
    upload = request.files.get('file')
    if not upload or not upload.filename:
        return _text('No file uploaded.', 400, 'validation')

    try:
        count = current_app.importer.import_upload(upload)
    except LeaderboardError as e:
        return _text(f'Error while processing CSV data: {e.message}', e.status_code, e.kind)

    return _text(f'{count} records imported', 200)
