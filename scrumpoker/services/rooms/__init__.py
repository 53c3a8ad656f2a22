"""Room domain services: store, player lifecycle, game logic, timers.

This package holds the estimation-room state machine. Socket handlers and
HTTP routes reach it through the ``RoomServices`` object the application
factory stores on ``app.extensions['scrumpoker']``; nothing here keeps
module-level state.
"""

import time
from dataclasses import dataclass

from .game_logic import GameLogic
from .players import AddPlayerResult, JoinError, PlayerLifecycle
from .scheduler import DeferredActions, RoomJanitor
from .session import SessionProtocol
from .store import RoomStore


@dataclass
class RoomServices:
    store: RoomStore
    players: PlayerLifecycle
    game: GameLogic
    deferred: DeferredActions
    janitor: RoomJanitor
    session: SessionProtocol


def build_services(socketio, config, logger, clock=None, background: bool = True) -> RoomServices:
    """Wire every room component around a single store.

    With ``background`` False no worker is ever spawned: deferred actions
    wait for run_due() and the janitor only sweeps when asked.
    """
    clock = clock or time.time
    spawn = socketio.start_background_task if background else None

    store = RoomStore(clock=clock, logger=logger)
    players = PlayerLifecycle(store, max_players=int(config.get('MAX_PLAYERS_PER_ROOM', 20)))
    game = GameLogic(store)
    deferred = DeferredActions(clock=clock, spawn=spawn, sleep=socketio.sleep, logger=logger)
    janitor = RoomJanitor(
        store,
        interval_sec=float(config.get('ROOM_CLEANUP_INTERVAL_SEC', 60)),
        threshold_sec=float(config.get('ROOM_CLEANUP_TIMEOUT_SEC', 30 * 60)),
        spawn=spawn,
        sleep=socketio.sleep,
    )
    session = SessionProtocol(
        socketio,
        store,
        players,
        game,
        deferred,
        grace_period_sec=float(config.get('RECONNECTION_GRACE_PERIOD_SEC', 30)),
        removal_delay_sec=int(config.get('REMOVAL_DISCONNECT_DELAY_MS', 100)) / 1000.0,
        namespace=config.get('SOCKETIO_NAMESPACE', '/'),
        logger=logger,
    )
    return RoomServices(store, players, game, deferred, janitor, session)


__all__ = [
    'AddPlayerResult',
    'DeferredActions',
    'GameLogic',
    'JoinError',
    'PlayerLifecycle',
    'RoomJanitor',
    'RoomServices',
    'RoomStore',
    'SessionProtocol',
    'build_services',
]
