# gatorfeed

A small command-line RSS aggregator. Register a user, add or follow feeds,
let the aggregator collect posts from them on a schedule, and browse the
newest posts from the feeds you follow. Everything is kept in a SQLite
database.

It uses only the Python standard library (Python 3.10 or later).

## Installation

```
pip install .
```

## Configuration

gatorfeed reads its settings from `.gatorconfig.json` in your home
directory. The file must exist before the first run; gatorfeed does not
create it:

```json
{
  "db_url": "gator.db",
  "current_user_name": ""
}
```

- `db_url` names the SQLite database. It may be a plain file path,
  `sqlite:///path/to/file.db`, `sqlite://` or `:memory:` (the last two keep
  everything in memory for the length of one command). Any other URL with a
  `scheme://` is refused. The tables are created on first use.
- `current_user_name` is the logged-in user; `login` and `register`
  rewrite the file to update it.

## Usage

```
gatorfeed <command> [arguments...]
```

| Command                | What it does                                                   |
|------------------------|----------------------------------------------------------------|
| `help`                 | List the available commands with a short description           |
| `register <name>`      | Create a user and log in as them                               |
| `login <name>`         | Switch to an existing user                                     |
| `users`                | List users, marking the current one with `(current)`           |
| `reset`                | Delete all users, and with them their feeds, follows and posts |
| `addfeed <name> <url>` | Add a feed and follow it as the current user                   |
| `feeds`                | List every known feed (name, then URL)                         |
| `follow <url>`         | Follow a feed that has already been added                      |
| `following`            | List the names of the feeds the current user follows           |
| `unfollow <url>`       | Stop following a feed                                          |
| `agg <interval>`       | Fetch feeds forever, one every interval                        |
| `browse [limit]`       | Show the newest posts from followed feeds (default 2)          |

`addfeed`, `follow`, `following`, `unfollow` and `browse` act as the user
named in `current_user_name`; they fail if that user does not exist.

Errors are printed to standard error and the program exits with status 1.
Running without a command prints a usage line and exits with status 1.

### Example

```
gatorfeed register alice
gatorfeed addfeed "Example Blog" https://example.com/feed.xml
gatorfeed agg 1m
gatorfeed browse 5
```

### Collecting posts

`agg` takes an interval such as `30s`, `1m`, `1h30m`, `1.5h` or `250ms`
(units `ns`, `us`, `ms`, `s`, `m`, `h`). If the interval cannot be parsed,
`agg` returns at once without doing anything. Otherwise it runs until
interrupted (Ctrl-C exits with status 130). On each tick it:

1. picks the feed fetched least recently, never-fetched feeds first, and
   marks it as fetched;
2. downloads it with the `User-Agent` header `gator`;
3. stores each `<item>` as a post, reading its `pubDate` as an RFC 1123
   date with a numeric zone (`Mon, 02 Jan 2006 15:04:05 -0700`).

A post whose URL is already stored is skipped. If a tick fails (network
error, unreadable XML, a date in another format), the error is ignored and
the next tick goes ahead.

`browse` prints each post's title, a rule line, its description and its
URL, newest first by the time the post was stored.

## Using it from Python

- `gatorfeed.database.connect(url)` opens a database and returns a
  `Queries` object with methods such as `create_user`, `get_feeds`,
  `create_feed_follow` and `get_posts_for_user`. Lookups that find nothing
  raise `NotFoundError`; inserts that break a uniqueness rule raise
  `DuplicateError`. `Queries.transaction()` is a context manager that runs
  the enclosed queries atomically.
- `gatorfeed.rssfeed.parse_feed(data)` parses an RSS document into
  `RSSFeed` / `RSSChannel` / `RSSItem` dataclasses, raising `ValueError`
  for malformed XML.
- `gatorfeed.scraper.scrape_feeds(state, fetch)` runs one aggregation tick
  and returns the posts it created; `fetch` may be any function that takes
  a URL and returns an `RSSFeed`.
- `gatorfeed.cli.build_commands()` returns the command registry and
  `gatorfeed.cli.main(argv)` runs one command and returns its exit status.

## What it does not do

- It stores data in SQLite only; there is no support for other database
  servers.
- It reads RSS 2.0 (`<rss><channel><item>`) only; Atom feeds yield no posts.
- HTML entities are unescaped in a channel's title and description, but
  item titles and descriptions are stored as received.
- There is no way to delete a single user or feed other than `reset`.

## Development

```
pip install -e ".[test]"
pytest
```