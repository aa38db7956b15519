"""
reset_data.py
-------------
Utility script to clear all stored data (accounts, profiles, cars, bookings,
reviews) from the local data.pkl file. Uploaded media is left alone.

Usage:
    $ python reset_data.py

After running this script, you can repopulate sample data by executing:
    $ python seeds.py
"""

from rentease.models.store import Store


def main():
    store = Store.instance()
    # Empties every table and writes the file
    store.clear()

    print(f"{store.path} has been cleared.")
    print("Tip: run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
