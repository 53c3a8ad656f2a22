from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the scrum poker server!'})

@main.route('/health')
def health():
    store = current_app.extensions['scrumpoker'].store
    return jsonify({'status': 'ok', 'rooms': store.active_room_count()})
