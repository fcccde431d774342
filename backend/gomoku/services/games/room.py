import logging
import random
import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, List, Optional

from .board import Board
from .timer import TurnTimer

logger = logging.getLogger(__name__)

MARK_X = 'X'
MARK_O = 'O'
MARKS = (MARK_X, MARK_O)
MAX_SEATS = 2


class RoomStatus(IntEnum):
    # Wire values shared with the lobby client
    FULL = 2
    READY_TO_PLAY = 3


class RoomFullError(Exception):
    """Raised when a third handle tries to sit down in a room."""

    def __init__(self, token: str):
        super().__init__(f"room {token} is full")
        self.token = token


@dataclass
class Seat:
    sid: str
    symbol: Optional[str] = None


def other_mark(mark: str) -> str:
    return MARK_O if mark == MARK_X else MARK_X


class Room:
    """One match between two seated handles.

    Inbound events and timer expiry both go through the methods below, and
    every method runs under ``self.lock`` so a countdown tick can never
    interleave with a move or a leave.
    """

    def __init__(
        self,
        token: str,
        publisher,
        rng: Optional[random.Random] = None,
        created_at: Optional[int] = None,
        timer_factory: Optional[Callable[..., TurnTimer]] = None,
    ):
        self.token = token
        self.publisher = publisher
        self.rng = rng or random.Random()
        self.created_at = created_at if created_at is not None else int(time.time() * 1000)
        self.seats: List[Seat] = []
        self.board = Board.create()
        self.current_player: Optional[str] = None
        self.game_over = False
        self.lock = threading.RLock()
        factory = timer_factory or TurnTimer
        self.timer = factory(
            on_tick=self._emit_timer,
            on_expire=self.turn_switch,
            lock=self.lock,
            label=token,
        )

    # ---- read helpers ----

    @property
    def is_full(self) -> bool:
        return len(self.seats) >= MAX_SEATS

    @property
    def is_empty(self) -> bool:
        return not self.seats

    @property
    def waiting(self) -> bool:
        return len(self.seats) < MAX_SEATS

    @property
    def in_progress(self) -> bool:
        return len(self.seats) == MAX_SEATS and not self.game_over and self.current_player is not None

    @property
    def status(self) -> RoomStatus:
        return RoomStatus.FULL if self.is_full else RoomStatus.READY_TO_PLAY

    @property
    def time_remaining(self) -> int:
        return self.timer.remaining

    def seat_for(self, sid: str) -> Optional[Seat]:
        for seat in self.seats:
            if seat.sid == sid:
                return seat
        return None

    def has_seat(self, sid: str) -> bool:
        return self.seat_for(sid) is not None

    def summary(self) -> dict:
        return {
            'id': self.token,
            'status': int(self.status),
            'createdDate': self.created_at,
        }

    # ---- transitions ----

    def join(self, sid: str) -> None:
        with self.lock:
            if self.has_seat(sid):
                self._emit_waiting()
                return
            if self.is_full:
                raise RoomFullError(self.token)
            self.seats.append(Seat(sid=sid))
            self.publisher.enter_room(sid, self.token)
            logger.info(f"[room-join] room={self.token} sid={sid} seats={len(self.seats)}")
            self._emit_waiting()
            if self.is_full:
                self.reset()

    def reset(self) -> None:
        with self.lock:
            if len(self.seats) != MAX_SEATS:
                return
            self.game_over = False
            self.board = Board.create()
            # Starting mover and seat marks are drawn independently
            self.current_player = self.rng.choice(MARKS)
            symbols = list(MARKS)
            self.rng.shuffle(symbols)
            for seat, symbol in zip(self.seats, symbols):
                seat.symbol = symbol
            for seat in self.seats:
                self.publisher.emit('joined', {'symbol': seat.symbol}, to=seat.sid)
            self.publisher.emit('resetGame', {'currentPlayer': self.current_player}, to=self.token)
            logger.info(f"[room-reset] room={self.token} first={self.current_player}")
            self.timer.restart()

    def move(self, sid: str, row, col) -> bool:
        """Place the seat's mark at ``(row, col)``. Returns False when ignored."""
        with self.lock:
            if self.game_over:
                return self._ignore('game over', sid)
            seat = self.seat_for(sid)
            if seat is None or seat.symbol is None or self.current_player != seat.symbol:
                return self._ignore('not your turn', sid)
            if not _is_coordinate(row) or not _is_coordinate(col) or not self.board.in_bounds(row, col):
                return self._ignore('out of range', sid)
            if not self.board.is_empty(row, col):
                return self._ignore('occupied', sid)

            self.board.place(row, col, seat.symbol)
            winning_cells = self.board.check_win(row, col, seat.symbol)
            if winning_cells:
                self._emit_update(row, col, seat.symbol)
                self.publisher.emit('gameOver', {
                    'winner': seat.symbol,
                    'cells': [{'row': r, 'col': c} for r, c in winning_cells],
                }, to=self.token)
                self.timer.cancel()
                self.game_over = True
                self.current_player = None
                logger.info(f"[game-over] room={self.token} winner={seat.symbol}")
                return True

            self.current_player = other_mark(seat.symbol)
            self.timer.restart()
            self._emit_update(row, col, seat.symbol)
            return True

    def pass_turn(self, sid: str) -> bool:
        with self.lock:
            seat = self.seat_for(sid)
            if seat is None or seat.symbol is None or self.current_player != seat.symbol:
                return self._ignore('pass out of turn', sid)
            self.turn_switch()
            return True

    def turn_switch(self) -> None:
        """Hand the turn to the other mark. Shared by pass and timer expiry."""
        with self.lock:
            if not self.in_progress:
                return
            self.current_player = other_mark(self.current_player)
            self.timer.restart()
            self._emit_update(None, None, None)

    def request_reset(self, sid: str) -> None:
        with self.lock:
            if not self.has_seat(sid):
                return
            self.reset()

    def leave(self, sid: str) -> int:
        """Vacate the handle's seat and return the remaining seat count."""
        with self.lock:
            seat = self.seat_for(sid)
            if seat is None:
                return len(self.seats)
            self.seats.remove(seat)
            self.publisher.leave_room(sid, self.token)
            logger.info(f"[room-leave] room={self.token} sid={sid} seats={len(self.seats)}")
            if len(self.seats) < MAX_SEATS:
                self.publisher.emit('opponentLeft', to=self.token)
                self.timer.cancel()
                self.current_player = None
                self.game_over = False
                for remaining in self.seats:
                    remaining.symbol = None
            return len(self.seats)

    # ---- outbound ----

    def _emit_waiting(self) -> None:
        self.publisher.emit('checkWaitingOtherPlayer', {'waiting': self.waiting}, to=self.token)

    def _emit_timer(self, remaining: int) -> None:
        self.publisher.emit('timer', {'time': remaining}, to=self.token)

    def _emit_update(self, row, col, symbol) -> None:
        self.publisher.emit('updateBoard', {
            'row': row,
            'col': col,
            'symbol': symbol,
            'currentPlayer': self.current_player,
        }, to=self.token)

    def _ignore(self, reason: str, sid: str) -> bool:
        logger.debug(f"[move-ignored] room={self.token} sid={sid} reason={reason}")
        return False


def _is_coordinate(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
