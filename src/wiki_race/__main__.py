from wiki_race.main import app

app(prog_name="wiki-race")
