from seed.seed import run

run()
