from trivia_engine.cli.main import run

run()
