import time

import badgereg

ADMIN = "0x00a329c0648769a73afac7f9381e08fb43dbea72"
ALICE = "0x0000000000000000000000000000000000a11ce5"
FEE = 10**18


def main() -> None:
    server = badgereg.run(port=57794, admin=ADMIN, fee=FEE, new_server=True)
    alice = server.client(principal=ALICE)
    admin = alice.as_principal(ADMIN)

    badge_id = alice.register(ALICE, "awesome", FEE)
    alice.set_meta(badge_id, "icon", "ipfs://awesome-icon")
    print("registered", alice.badge(badge_id))

    print("drained", admin.drain())

    revision, events = alice.events()
    for event in events:
        print(event)

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
