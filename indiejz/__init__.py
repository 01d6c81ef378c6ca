"""IndieJZ Store: backend da loja de jogos indie."""
