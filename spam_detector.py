import argparse
import logging
import re
import sys

from pydantic import ValidationError

from containers import DEFAULT_LOWER_LOAD_FACTOR, DEFAULT_UPPER_LOAD_FACTOR, HashTable
from errors import ConfigError, InvalidInput
from observability import setup_logging
from settings import get_settings

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
VALID_LINE = re.compile(r"[^,]+,[0-9]+[\n\r]?")
WRONG_USAGE_MSG = "Usage: SpamDetector <database path> <message path> <threshold>\n"
INVALID_INPUT_MSG = "Invalid input\n"
MEMORY_MSG_ERROR = "Memory error occurred\n"
OVER_THRESHOLD_MSG = "SPAM"
UNDER_THRESHOLD_MSG = "NOT_SPAM"
COMMA = ","


# Lowercasing applied to both database sequences and message windows so matching is
# case-insensitive. O(n) in the length of the string
def make_lower_case(sequence):
    return sequence.lower()


# Fills the database table from the text of a database file. Every line must be a
# "sequence,score" pair; the only blank line allowed is the one left after the final
# newline. A sequence listed twice keeps its last score. The length of every sequence is
# recorded in a HashTable used as a set, which prevents duplicate lengths. O(n) in the
# number of lines.
def parse_database(text, database, lengths):
    lines = text.split("\n")
    for line_number, line in enumerate(lines):
        if not VALID_LINE.fullmatch(line):
            if line == "" and line_number == len(lines) - 1:
                break
            raise InvalidInput()
        comma_index = line.find(COMMA)
        sequence = make_lower_case(line[:comma_index])
        database[sequence] = int(line[comma_index + 1:])
        lengths.insert(len(sequence), None)
    return database


# Reads the database file into a new HashTable of sequence -> score plus a HashTable of
# the distinct sequence lengths.
def create_database_map(database_path, lower_load_factor=DEFAULT_LOWER_LOAD_FACTOR,
                        upper_load_factor=DEFAULT_UPPER_LOAD_FACTOR):
    database = HashTable(lower_load_factor, upper_load_factor, default_factory=int)
    lengths = HashTable()
    parse_database(_read_file(database_path), database, lengths)
    logger.info("Loaded %d sequences from %s", len(database), database_path,
                extra={"database_path": str(database_path), "sequences": len(database)})
    return database, lengths


# Brute force scoring: for every sequence length in the database, every window of that
# length in the message is looked up, so overlapping occurrences all count. Runs in
# O(n * m) where n is the message length and m the number of distinct lengths.
def generate_score(message, database, lengths):
    result = 0
    for length in lengths.key_iterator():
        for start in range(len(message) - length + 1):
            window = make_lower_case(message[start:start + length])
            if database.contains_key(window):
                result += database[window]
    return result


# The threshold must parse as a number greater than zero.
def parse_threshold(raw_threshold):
    try:
        threshold = float(raw_threshold)
    except ValueError as e:
        raise InvalidInput() from e
    if not threshold > 0:
        raise InvalidInput()
    return threshold


def is_spam(database_path, message_path, threshold, lower_load_factor=DEFAULT_LOWER_LOAD_FACTOR,
            upper_load_factor=DEFAULT_UPPER_LOAD_FACTOR):
    database, lengths = create_database_map(database_path, lower_load_factor, upper_load_factor)
    score = generate_score(_read_file(message_path), database, lengths)
    logger.info("Message %s scored %d against threshold %s", message_path, score, threshold,
                extra={"message_path": str(message_path), "score": score, "threshold": threshold})
    return score >= threshold


def _read_file(path):
    try:
        with open(path, encoding="utf-8", newline="") as fp:
            return fp.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidInput() from e


class _ArgumentParser(argparse.ArgumentParser):
    # Wrong arguments print the fixed usage line and exit with EXIT_FAILURE.
    def error(self, message):
        self.exit(EXIT_FAILURE, WRONG_USAGE_MSG)


def build_parser():
    parser = _ArgumentParser(prog="SpamDetector",
                             description="Decide whether a message is spam using a database of scored sequences.")
    parser.add_argument("database_path", help="CSV file of sequence,score lines")
    parser.add_argument("message_path", help="Message file to score")
    parser.add_argument("threshold", help="Score at or above which the message is spam (must be > 0)")
    return parser


# Entry point. Prints SPAM or NOT_SPAM and returns the process exit code.
def main(argv=None):
    args = build_parser().parse_args(argv)
    handler = None
    try:
        settings = get_settings()
        handler = setup_logging(settings.log_level, settings.log_format)
        threshold = parse_threshold(args.threshold)
        if is_spam(args.database_path, args.message_path, threshold,
                   settings.lower_load_factor, settings.upper_load_factor):
            print(OVER_THRESHOLD_MSG)
        else:
            print(UNDER_THRESHOLD_MSG)
    except InvalidInput:
        sys.stderr.write(INVALID_INPUT_MSG)
        return EXIT_FAILURE
    except MemoryError:
        sys.stderr.write(MEMORY_MSG_ERROR)
        return EXIT_FAILURE
    except (ConfigError, ValidationError) as e:
        sys.stderr.write("Invalid configuration: " + str(e) + "\n")
        return EXIT_FAILURE
    finally:
        if handler is not None:
            logging.root.removeHandler(handler)
    return EXIT_SUCCESS


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
