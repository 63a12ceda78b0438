import sys

from guessage import create_app
from guessage.server import serve

app = create_app()

if __name__ == '__main__':
    sys.exit(serve(app))
