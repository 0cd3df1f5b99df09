from resonant.cli import main

main()
