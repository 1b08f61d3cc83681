# -*- coding: utf-8 -*-
"""
Play random games to exercise the engine.
"""
from collections import Counter

from numpy.random import default_rng
from tqdm import trange

from slide2048.core.terminal import legal_directions
from slide2048.envs import Session


def play_random_game(session: Session, seed: int | None = None, max_moves: int = 100_000) -> int:
    """
    Play random legal moves until the game ends.

    Parameters
    ----------
    session : Session
        The session to play, a new game is started.
    seed : int, optional
        Seed of the move picker.
    max_moves : int, optional
        Upper bound on the number of moves (default is 100000).

    Returns
    -------
    int
        Number of moves played.
    """
    picker = default_rng(seed)
    session.new_game()

    moves = 0
    while not session.is_ended and moves < max_moves:
        directions = legal_directions(session.board)
        if not directions:
            break
        session.apply_move(directions[picker.integers(len(directions))])
        moves += 1
    return moves


def evaluate(length: int = 10, seed: int | None = None) -> dict[int, int]:
    """
    Play random games and count the highest tile of each.

    Parameters
    ----------
    length : int, optional
        The number of games to play (default is 10).
    seed : int, optional
        Seed for reproducible runs.

    Returns
    -------
    dict[int, int]
        Frequency of each highest tile.
    """
    session = Session(seed=seed)
    score = []

    with trange(length) as period:
        for num in period:
            play_random_game(session, seed=None if seed is None else seed + num)

            # ##: Log.
            period.set_description(f'Game: {num + 1}')
            period.set_postfix(score=session.score, max=session.board.max_tile())

            score.append(session.board.max_tile())

    return dict(Counter(score))


if __name__ == '__main__':
    from argparse import ArgumentParser

    parser = ArgumentParser()
    parser.add_argument('--games', type=int, default=10)
    parser.add_argument('--seed', type=int, default=None)
    args = parser.parse_args()

    result = evaluate(length=args.games, seed=args.seed)
    print(f'Random play over {args.games} games, highest tiles: {dict(sorted(result.items()))}')
