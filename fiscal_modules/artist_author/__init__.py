"""French artist-author (BNC) ruleset: bases, URSSAF, IRCEC RAAP, VAT, income tax."""

from fiscal_modules.artist_author.module import ArtistAuthorModule

__all__ = ["ArtistAuthorModule"]
