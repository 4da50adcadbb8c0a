from flask import Blueprint, current_app, jsonify, request

bp = Blueprint('players', __name__, url_prefix='/api/players')


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.route('/search', methods=['POST'])
def search():
    """Scores of one game, highest first."""
    data = _payload()
    return jsonify(current_app.ranking.search_scores(data.get('gameName')))


@bp.route('/top3', methods=['GET'])
def top3():
    """Top three players of every game table."""
    return jsonify(current_app.ranking.top3())


@bp.route('/update-score', methods=['PUT'])
def update_score():
    data = _payload()

    player = current_app.ranking.update_score(
        game_name=data.get('gameName'),
        player_name=data.get('playerName'),
        nickname=data.get('nickname'),
        new_score=data.get('newScore'),
        display_type=data.get('displayType', 0)
    )

    return jsonify({'message': 'Score updated', 'updatedPlayer': player})


@bp.route('/add-member', methods=['POST'])
def add_member():
    """Add a new member to every game."""
    data = _payload()

    results = current_app.membership.add_member(
        name=data.get('name'),
        nickname=data.get('nickname'),
        department=data.get('department')
    )

    return jsonify({
        'message': 'Member added to all games',
        'results': results
    }), 201


@bp.route('/delete-member', methods=['DELETE'])
def delete_member():
    """Remove a member from every game."""
    data = _payload()
    results = current_app.membership.delete_member(data.get('name'))

    return jsonify({
        'message': 'Member deleted from all games',
        'results': results
    })
