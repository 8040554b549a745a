from .bot import run

run()
