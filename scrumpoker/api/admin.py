from flask import Blueprint, current_app, jsonify

admin = Blueprint('admin', __name__)


@admin.route('/stats', methods=['GET'])
def get_stats():
    """
    Returns aggregated room, player and card statistics. Never mutates state.
    """
    store = current_app.extensions['scrumpoker'].store
    return jsonify(store.admin_stats()), 200


@admin.route('/rooms/<string:room_code>', methods=['GET'])
def get_room_stats(room_code):
    """
    Returns the reveal/reset readiness of one room.
    """
    game = current_app.extensions['scrumpoker'].game
    stats = game.stats(room_code)
    if stats is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(stats), 200
