"""Library for formatting peer list output."""

from abc import ABC, abstractmethod
from typing import Generator

import json
import sys
from typing import TextIO
import yaml


NO_PEERS = "<no peers>"


class PeerFormatter(ABC):
    """A formatter that prints a peer list update."""

    @abstractmethod
    def format(self, peers: list[str]) -> Generator[str, None, None]:
        """Format the peer list."""

    def print(self, peers: list[str], file: TextIO | None = None) -> None:
        """Output the peer list, to stdout unless a file is given."""
        file = file or sys.stdout
        for line in self.format(peers):
            print(line, file=file)
        file.flush()


class TextFormatter(PeerFormatter):
    """A formatter that prints the peers of an update on a single line."""

    def format(self, peers: list[str]) -> Generator[str, None, None]:
        """Format the peer list."""
        yield " ".join(peers) if peers else NO_PEERS


class YamlFormatter(PeerFormatter):
    """A formatter that prints each update as a yaml document."""

    def format(self, peers: list[str]) -> Generator[str, None, None]:
        """Format the peer list."""
        content = yaml.dump(list(peers), sort_keys=False, explicit_start=True)
        for line in content.rstrip("\n").split("\n"):
            yield line


class JsonFormatter(PeerFormatter):
    """A formatter that prints each update as a json line."""

    def format(self, peers: list[str]) -> Generator[str, None, None]:
        """Format the peer list."""
        yield json.dumps(list(peers))


FORMATTERS: dict[str, type[PeerFormatter]] = {
    "text": TextFormatter,
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}
