from trending.cli import main

main(prog_name="trending-snapshot")
