from homehub.cli import main

main()
