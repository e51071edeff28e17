from agchat.client.cli import main

main()
