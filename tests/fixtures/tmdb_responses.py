"""
Mock TMDB API responses for testing.

Contains realistic responses from the TMDB API for list, search and details
endpoints. These fixtures are used with respx to mock httpx calls in tests.
"""

# GET /trending/movie/day?page=1
TMDB_TRENDING_MOVIES_RESPONSE = {
    "page": 1,
    "results": [
        {
            "id": 693134,
            "title": "Dune: Part Two",
            "original_title": "Dune: Part Two",
            "release_date": "2024-02-27",
            "overview": "Follow the mythic journey of Paul Atreides...",
            "poster_path": "/1pdfLvkbY9ohJlCjQH2CZjjYVvJ.jpg",
            "backdrop_path": "/xOMo8BRK7PfcJv9JCnx7s5hj0PX.jpg",
            "vote_average": 8.2,
            "genre_ids": [878, 12],
            "media_type": "movie",
        },
        {
            "id": 19995,
            "title": "Avatar",
            "original_title": "Avatar",
            "release_date": "2009-12-15",
            "overview": "In the 22nd century, a paraplegic Marine...",
            "poster_path": "/jRXYjXNq0Cs2TcJjLkki24MLp7u.jpg",
            "vote_average": 7.6,
            "genre_ids": [28, 12, 14, 878],
            "media_type": "movie",
        },
    ],
    "total_pages": 500,
    "total_results": 10000,
}

# GET /search/multi?query=dune
TMDB_MULTI_SEARCH_RESPONSE = {
    "page": 1,
    "results": [
        {
            "id": 438631,
            "media_type": "movie",
            "title": "Dune",
            "original_title": "Dune",
            "release_date": "2021-09-15",
            "genre_ids": [878, 12],
        },
        {
            "id": 90228,
            "media_type": "tv",
            "name": "Dune: Prophecy",
            "original_name": "Dune: Prophecy",
            "first_air_date": "2024-11-17",
            "genre_ids": [10765, 18],
        },
        {
            "id": 1190668,
            "media_type": "person",
            "name": "Denis Villeneuve",
        },
    ],
    "total_pages": 1,
    "total_results": 3,
}

# GET /movie/550?append_to_response=credits,external_ids
TMDB_MOVIE_DETAILS_RESPONSE = {
    "id": 550,
    "title": "Fight Club",
    "original_title": "Fight Club",
    "release_date": "1999-10-15",
    "overview": "A ticking-time-bomb insomniac...",
    "poster_path": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
    "backdrop_path": "/hZkgoQYus5vegHoetLkCJzb17zJ.jpg",
    "vote_average": 8.4,
    "vote_count": 28000,
    "runtime": 139,
    "status": "Released",
    "tagline": "Mischief. Mayhem. Soap.",
    "imdb_id": "tt0137523",
    "genres": [{"id": 18, "name": "Drama"}, {"id": 53, "name": "Thriller"}],
    "credits": {
        "cast": [
            {"id": 819, "name": "Edward Norton", "character": "Narrator"},
            {"id": 287, "name": "Brad Pitt", "character": "Tyler Durden"},
        ],
        "crew": [
            {"id": 7467, "name": "David Fincher", "job": "Director"},
            {"id": 7469, "name": "Jim Uhls", "job": "Screenplay"},
        ],
    },
    "external_ids": {"imdb_id": "tt0137523"},
}

# GET /tv/1399?append_to_response=credits,external_ids
TMDB_TV_DETAILS_RESPONSE = {
    "id": 1399,
    "name": "Game of Thrones",
    "original_name": "Game of Thrones",
    "first_air_date": "2011-04-17",
    "overview": "Seven noble families fight for control...",
    "episode_run_time": [60],
    "number_of_seasons": 8,
    "number_of_episodes": 73,
    "status": "Ended",
    "genres": [{"id": 10765, "name": "Sci-Fi & Fantasy"}],
    "created_by": [{"id": 9813, "name": "David Benioff"}, {"id": 228068, "name": "D. B. Weiss"}],
    "credits": {"cast": [{"id": 22970, "name": "Peter Dinklage"}], "crew": []},
    "external_ids": {"imdb_id": "tt0944947"},
}

# GET /tv/1399/season/1
TMDB_SEASON_RESPONSE = {
    "id": 3624,
    "season_number": 1,
    "name": "Season 1",
    "air_date": "2011-04-17",
    "episodes": [
        {"id": 63056, "season_number": 1, "episode_number": 1, "name": "Winter Is Coming", "runtime": 62},
        {"id": 63057, "season_number": 1, "episode_number": 2, "name": "The Kingsroad", "runtime": 56},
    ],
}

TMDB_NOT_FOUND_RESPONSE = {
    "success": False,
    "status_code": 34,
    "status_message": "The resource you requested could not be found.",
}
