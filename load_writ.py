#!/usr/bin/env python3

import argparse
import pickle

from writ_pagination import paginate


def main(argv=None):
    parser = argparse.ArgumentParser(description="Print the Index of a pickled writ petition form.")
    parser.add_argument("pickle_filename", nargs="?", default="writ_form.pickle",
                        help="Pickle written by print_writ.py --pickle (default: writ_form.pickle).")
    args = parser.parse_args(argv)

    with open(args.pickle_filename, 'rb') as pf:
        loaded_form = pickle.load(pf)

    print("Loaded writ petition form from pickle:")
    print(loaded_form)
    print()
    print("INDEX:")
    for ordinal, title, page in paginate(loaded_form).index_rows():
        print(f"  {ordinal:>3}. {title:<60} {page}")


if __name__ == "__main__":
    main()
