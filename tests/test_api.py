import requests

from conftest import AGES
from guessage import db
from guessage.models import LeaderboardEntry, SubjectName
from guessage.services.age_oracle import age_oracle
from guessage.services.names import DatabaseNamePool, FakerNameSource, FileNamePool


def get_game(client):
    with client.session_transaction() as sess:
        return sess.get('game')


def play_round(client, age):
    """Show the current round, then answer it."""
    client.get('/guess')
    return client.post('/guess', data={'age': str(age)})


class ScriptedFaker:
    def __init__(self, names):
        self.names = iter(names)

    def first_name(self):
        return next(self.names)


def test_landing_page(client):
    res = client.get('/')
    assert res.status_code == 200
    assert b'Guess the Age' in res.data


def test_play_starts_fresh_game(client, known_names):
    res = client.get('/play')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/guess')
    game = get_game(client)
    assert game['attempts'] == 0
    assert game['totalScore'] == 0
    assert game['history'] == []
    assert sorted(game['names']) == sorted(known_names)
    assert 'currentAge' not in game


def test_play_discards_previous_game(client, known_names, ages):
    client.get('/play')
    play_round(client, 30)
    assert get_game(client)['attempts'] == 1
    client.get('/play')
    assert get_game(client)['attempts'] == 0


def test_guess_page_shows_next_name(client, known_names, ages):
    client.get('/play')
    first = get_game(client)['names'][0]
    res = client.get('/guess')
    assert res.status_code == 200
    assert first.encode() in res.data
    assert b'Round 1' in res.data
    assert get_game(client)['currentAge'] == AGES[first]


def test_reloading_round_does_not_ask_again(client, known_names, ages):
    client.get('/play')
    client.get('/guess')
    client.get('/guess')
    assert len(ages.calls) == 1


def test_guess_without_game_redirects_home(client):
    res = client.get('/guess')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/')
    res = client.post('/guess', data={'age': '30'})
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/')


def test_guess_before_round_is_shown_redirects(client, known_names, ages):
    client.get('/play')
    res = client.post('/guess', data={'age': '30'})
    assert res.headers['Location'].endswith('/guess')
    assert get_game(client)['attempts'] == 0
    assert ages.calls == []


def test_full_game_flow(client, known_names, ages):
    client.get('/play')
    names = get_game(client)['names']
    for i, name in enumerate(names):
        res = play_round(client, AGES[name])
        assert res.status_code == 302
        expected = '/result' if i == len(names) - 1 else '/guess'
        assert res.headers['Location'].endswith(expected)

    game = get_game(client)
    assert game['attempts'] == 5
    assert game['totalScore'] == 25000
    assert game['time'] is not None
    assert [r['subject_name'] for r in game['history']] == names
    # one lookup per round, made when the round is shown
    assert ages.calls == names

    # finished games go straight to the result page
    res = client.get('/guess')
    assert res.headers['Location'].endswith('/result')
    res = client.post('/guess', data={'age': '30'})
    assert res.headers['Location'].endswith('/result')
    assert get_game(client)['attempts'] == 5

    res = client.get('/result')
    assert res.status_code == 200
    assert b'25000' in res.data
    assert game['time'].encode() in res.data


def test_scores_follow_distance(client, known_names, ages):
    client.get('/play')
    name = get_game(client)['names'][0]
    play_round(client, AGES[name] + 25)
    record = get_game(client)['history'][0]
    assert record == {'subject_name': name, 'userGuess': AGES[name] + 25, 'trueAge': AGES[name], 'score': 2500}


def test_malformed_guess_is_rejected(client, known_names, ages):
    client.get('/play')
    res = play_round(client, 'old')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/guess')
    assert get_game(client)['attempts'] == 0
    res = client.get('/guess')
    assert b'Please enter a number.' in res.data
    # the round keeps its subject and age
    assert len(ages.calls) == 1


def test_missing_guess_is_rejected(client, known_names, ages):
    client.get('/play')
    client.get('/guess')
    res = client.post('/guess', data={})
    assert res.headers['Location'].endswith('/guess')
    assert get_game(client)['attempts'] == 0


def test_unknown_pooled_name_is_swapped(flask_app, client, ages):

    class ZedFirst:
        lazy = False

        def pick_names(self, count):
            return ['Zed', 'Bob', 'Cleo', 'Dan', 'Eve']

        def substitute(self, exclude):
            return next(n for n in ['Yuri', 'Ann'] if n not in exclude)

    flask_app.extensions['name_source'] = ZedFirst()
    client.get('/play')
    res = client.get('/guess')
    assert res.status_code == 200
    assert b'Ann' in res.data
    assert get_game(client)['names'] == ['Ann', 'Bob', 'Cleo', 'Dan', 'Eve']

    play_round(client, 64)
    game = get_game(client)
    assert game['attempts'] == 1
    assert game['history'][0]['subject_name'] == 'Ann'
    assert ages.calls == ['Zed', 'Yuri', 'Ann']


def test_game_moves_past_name_without_age(client, known_names, ages):
    client.get('/play')
    stuck = get_game(client)['names'][0]
    del ages.table[stuck]
    ages.table['Nova'] = 50

    class Spares(FileNamePool):
        def substitute(self, exclude):
            return 'Nova'

    client.application.extensions['name_source'] = Spares('unused')
    res = play_round(client, 50)
    assert res.headers['Location'].endswith('/guess')
    game = get_game(client)
    assert game['attempts'] == 1
    assert game['history'][0]['subject_name'] == 'Nova'
    assert stuck not in game['names']


def test_unresolvable_names_show_try_again(flask_app, client, ages):
    flask_app.config['NAME_RETRY_LIMIT'] = 3
    ages.table.clear()
    client.get('/play')
    res = client.get('/guess')
    assert res.status_code == 503
    assert b'try again' in res.data
    assert len(ages.calls) == 3
    assert get_game(client)['attempts'] == 0


def test_upstream_timeout_shows_try_again(client, known_names, monkeypatch):
    def slow(*args, **kwargs):
        raise requests.Timeout('too slow')

    monkeypatch.setattr(age_oracle.http, 'get', slow)
    client.get('/play')
    res = client.get('/guess')
    assert res.status_code == 503
    assert get_game(client)['attempts'] == 0


def test_corrupt_session_redirects_home(client):
    with client.session_transaction() as sess:
        sess['game'] = {'attempts': 3, 'totalScore': 0, 'history': [], 'time': None}
    res = client.get('/guess')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/')


def test_result_requires_finished_game(client, known_names, ages):
    res = client.get('/result')
    assert res.headers['Location'].endswith('/')
    client.get('/play')
    play_round(client, 30)
    res = client.get('/result')
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/')


def test_lazy_game_draws_a_name_each_round(flask_app, client, ages):
    source = FakerNameSource(retry_limit=5, faker=ScriptedFaker(['Nobody', 'Ann', 'Ann', 'Bob', 'Cleo', 'Dan', 'Eve']))
    flask_app.extensions['name_source'] = source
    client.get('/play')
    assert 'names' not in get_game(client)

    seen = []
    for _ in range(5):
        res = client.get('/guess')
        assert res.status_code == 200
        name = get_game(client)['current']
        assert name.encode() in res.data
        # reloading the page keeps the same subject
        client.get('/guess')
        assert get_game(client)['current'] == name
        seen.append(name)
        client.post('/guess', data={'age': str(AGES[name])})

    assert seen == ['Ann', 'Bob', 'Cleo', 'Dan', 'Eve']
    game = get_game(client)
    assert game['attempts'] == 5
    assert game['totalScore'] == 25000
    assert 'current' not in game
    assert 'currentAge' not in game


def test_lazy_game_scores_with_age_found_when_drawn(flask_app, client, ages):
    flask_app.extensions['name_source'] = FakerNameSource(retry_limit=5, faker=ScriptedFaker(['Ann']))
    client.get('/play')
    client.get('/guess')
    # the API forgets the name between showing the round and the guess
    ages.table.clear()
    res = client.post('/guess', data={'age': '64'})
    assert res.headers['Location'].endswith('/guess')
    game = get_game(client)
    assert game['attempts'] == 1
    assert game['history'][0] == {'subject_name': 'Ann', 'userGuess': 64, 'trueAge': 64, 'score': 5000}
    assert ages.calls == ['Ann']


def test_lazy_game_post_before_round_redirects(flask_app, client, ages):
    flask_app.extensions['name_source'] = FakerNameSource(retry_limit=1)
    client.get('/play')
    res = client.post('/guess', data={'age': '30'})
    assert res.headers['Location'].endswith('/guess')
    assert get_game(client)['attempts'] == 0


def test_leaderboard_empty(client):
    res = client.get('/leaderboard')
    assert res.status_code == 200
    assert b'No scores yet' in res.data


def test_submit_score_to_leaderboard(client, known_names, ages):
    client.get('/play')
    for name in get_game(client)['names']:
        play_round(client, AGES[name])

    res = client.post('/leaderboard', data={'username': 'alice'})
    assert res.status_code == 302
    assert res.headers['Location'].endswith('/leaderboard')
    entry = LeaderboardEntry.query.one()
    assert (entry.username, entry.score) == ('alice', 25000)
    # the game is used up once submitted
    assert get_game(client) is None

    res = client.get('/leaderboard')
    assert b'alice' in res.data
    assert b'25000' in res.data


def test_submit_score_requires_finished_game(client, known_names, ages):
    res = client.post('/leaderboard', data={'username': 'mallory'})
    assert res.headers['Location'].endswith('/')
    client.get('/play')
    res = client.post('/leaderboard', data={'username': 'mallory'})
    assert res.headers['Location'].endswith('/')
    assert LeaderboardEntry.query.count() == 0


def test_leaderboard_store_failure_shows_try_again(flask_app, client):
    db.drop_all()
    res = client.get('/leaderboard')
    assert res.status_code == 503
    db.create_all()


def test_database_names_game(flask_app, client, ages):
    for name in AGES:
        db.session.add(SubjectName(name=name))
    db.session.commit()
    flask_app.extensions['name_source'] = DatabaseNamePool()

    client.get('/play')
    assert sorted(get_game(client)['names']) == sorted(AGES)


def test_empty_name_table_shows_try_again(flask_app, client):
    flask_app.extensions['name_source'] = DatabaseNamePool()
    res = client.get('/play')
    assert res.status_code == 503
    assert get_game(client) is None
