# netlab

A collection of small networking exercises as a Python package: routing
table computation, traffic shaping, automatic repeat request (ARQ)
protocols, and a handful of tiny client/server services over TCP and UDP
on the loopback interface.

Nothing outside the Python standard library is needed.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

| Module                 | What it does                                                                 |
|------------------------|------------------------------------------------------------------------------|
| `netlab.routing`       | Distance-vector and link-state (Dijkstra) routing tables from a cost matrix  |
| `netlab.leaky_bucket`  | Leaky-bucket traffic shaping, slot by slot                                   |
| `netlab.reverse`       | A server that reverses a string, over TCP or UDP                             |
| `netlab.time_service`  | A UDP time server and client                                                 |
| `netlab.arrays`        | Servers that sort an integer array or report its max, min and average       |
| `netlab.smtp`          | A minimal SMTP-like command exchange                                        |
| `netlab.arq`           | Stop-and-wait, Go-Back-N and Selective Repeat ARQ against a lossy ACK server |
| `netlab.chat`          | A word-limited chat server, a broadcast chat server and a chat client       |

Unreachable links in routing matrices are written as `9999`.

The string-reversal service follows a two-client pattern: one client sends
a string, the server reverses it, and a second client collects the result.

## Using the library

```python
from netlab.routing import distance_vector, link_state, render_tables
from netlab.leaky_bucket import simulate, render
from netlab.chat import count_words
from netlab.reverse import reverse_text
from netlab.arrays import bubble_sort, summarize

cost = [
    [0, 2, 9999],
    [2, 0, 3],
    [9999, 3, 0],
]
print(render_tables(distance_vector(cost), True))
print(render_tables(link_state(cost), True))

print(render(simulate([4, 2, 6, 1], 5, 3)))

print(reverse_text("hello"))           # "olleh"
print(count_words("one two three"))    # 3
print(bubble_sort([5, 1, 4]))          # [1, 4, 5]
print(summarize([5, 1, 4]))            # max, min and average
```

## Command-line tools

Each module that runs as a program has a command:

```
netlab-routing        # routing tables from a cost matrix read on standard input
netlab-leaky-bucket   # leaky-bucket simulation for packet sizes read on standard input
netlab-reverse        # string-reversal server and its clients
netlab-time           # UDP time server and client
netlab-arrays         # array sort / statistics server and clients
netlab-smtp           # SMTP-like server and client
netlab-arq            # ARQ acknowledgement server and interactive client
netlab-chat           # chat servers and client
```

`netlab-routing` takes one of `dv`, `dv-converged`, `dijkstra` or
`link-state`, followed by an optional input file.

The network services listen on `127.0.0.1`. Start the server side in one
terminal and the client side in another.

## Not included

The package has no service that raises a number to a power for a pair of
clients; only the string-reversal service works in that two-client shape.