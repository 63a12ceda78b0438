from flask import Blueprint, current_app, flash, redirect, render_template, request, session, url_for

from guessage.services.age_oracle import age_oracle
from guessage.services.games import (
    GameSession,
    InvalidGameState,
    MalformedGuess,
    NameResolutionExhausted,
    NoActiveGame,
    PersistenceFailure,
    UpstreamError,
    coerce_guess,
)
from guessage.services.leaderboard import record_score, top_scores
from guessage.services.names import resolve_subject

main = Blueprint('main', __name__)

GAME_KEY = 'game'


def _name_source():
    return current_app.extensions['name_source']


def _load_game() -> GameSession:
    return GameSession.from_snapshot(session.get(GAME_KEY))


def _save_game(game: GameSession) -> None:
    session[GAME_KEY] = game.to_snapshot()


@main.errorhandler(NoActiveGame)
@main.errorhandler(InvalidGameState)
def handle_no_game(exc):
    current_app.logger.warning(f"[session] {request.method} {request.path}: {exc}")
    flash('Start a new game to play.')
    return redirect(url_for('main.index'))


@main.errorhandler(MalformedGuess)
def handle_bad_guess(exc):
    current_app.logger.warning(f"[guess] rejected: {exc}")
    flash('Please enter a number.')
    return redirect(url_for('main.guess'))


@main.errorhandler(NameResolutionExhausted)
@main.errorhandler(UpstreamError)
@main.errorhandler(PersistenceFailure)
def handle_upstream(exc):
    current_app.logger.error(f"[{type(exc).__name__}] {request.method} {request.path}: {exc}")
    return render_template('try_again.html', message=str(exc)), 503


@main.route('/')
def index():
    return render_template('index.html')


@main.route('/play')
def play():
    session.pop(GAME_KEY, None)
    game = GameSession.start(_name_source())
    _save_game(game)
    current_app.logger.info(f"[play] new game names={list(game.names) if game.names else 'lazy'}")
    return redirect(url_for('main.guess'))


@main.route('/guess', methods=['GET'])
def guess():
    game = _load_game()
    if game.is_over():
        return redirect(url_for('main.result'))

    if game.current_age is None:
        name, age = resolve_subject(game, _name_source(), age_oracle, current_app.config.get('NAME_RETRY_LIMIT', 10))
        if game.next_subject() not in (None, name):
            current_app.logger.info(f"[guess] round={game.attempts + 1} swapped {game.next_subject()!r} for {name!r}")
        game.assign_subject(name, age)
        _save_game(game)

    return render_template(
        'guessing.html',
        name=game.next_subject(),
        attempts=game.attempts + 1,
        remaining=game.remaining(),
        score=game.total_score,
    )


@main.route('/guess', methods=['POST'])
def submit_guess():
    game = _load_game()
    if game.is_over():
        return redirect(url_for('main.result'))
    name = game.next_subject()
    true_age = game.current_age
    if true_age is None:
        # round was never shown
        return redirect(url_for('main.guess'))

    user_guess = coerce_guess(request.form.get('age'))
    record = game.make_guess(name, true_age, user_guess)
    current_app.logger.info(
        f"[guess] round={game.attempts} name={name!r} guess={record.user_guess} age={true_age} score={record.score}"
    )

    if game.is_over():
        game.finalize()
        _save_game(game)
        current_app.logger.info(f"[finish] total={game.total_score} at {game.time}")
        return redirect(url_for('main.result'))
    _save_game(game)
    return redirect(url_for('main.guess'))


@main.route('/result')
def result():
    try:
        game = _load_game()
    except NoActiveGame:
        return redirect(url_for('main.index'))
    if not game.is_over():
        return redirect(url_for('main.index'))
    return render_template('result.html', **game.summary())


@main.route('/leaderboard', methods=['GET'])
def leaderboard():
    entries = top_scores(current_app.config.get('LEADERBOARD_SIZE', 5))
    return render_template('leaderboard.html', entries=entries)


@main.route('/leaderboard', methods=['POST'])
def submit_score():
    game = _load_game()
    if not game.is_over():
        return redirect(url_for('main.index'))
    record_score(request.form.get('username'), game.total_score)
    session.pop(GAME_KEY, None)
    return redirect(url_for('main.leaderboard'))
