"""Storefront command-line client.

Drives the session, cart and checkout services against a running backend.
The session is kept in the durable store between invocations.

Usage:
    storefront login --email jane@example.com
    storefront products --search lamp
    storefront add 64b7f0c2a1
    storefront cart
    storefront checkout --email jane@example.com --phone 555-0100 ...
    storefront logout
"""

import argparse
import getpass
import sys

from app import Storefront, create_storefront
from identity.api.schemas import SignupRequest
from ordering.cart.cart import Cart
from ordering.checkout.form import CheckoutForm, format_card_number, format_expiry_date
from shared.config import load_settings
from shared.errors import ConfigError, StorefrontError, ValidationError
from shared.logging import add_context, clear_context, configure_logging


def _print_cart(cart: Cart) -> None:
    if cart.is_empty:
        print("Your cart is empty")
        return

    noun = "item" if cart.line_count == 1 else "items"
    print(f"{cart.line_count} {noun} in your cart")
    for line in cart.lines:
        print(f"  {line.product_id}  {line.product_name}  x{line.quantity}  ${line.line_total:.2f}")
    print(f"Subtotal: ${cart.subtotal:.2f}")
    print(f"Tax:      ${cart.tax:.2f}")
    print(f"Shipping: ${cart.shipping:.2f}")
    print(f"Total:    ${cart.display_total:.2f}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
def cmd_login(storefront: Storefront, args) -> None:
    password = args.password or getpass.getpass("Password: ")
    session = storefront.sessions.login(args.email, password)
    print(f"Login successful! Signed in as {session.display_name}")


def cmd_signup(storefront: Storefront, args) -> None:
    password = args.password or getpass.getpass("Password: ")
    confirm = args.password or getpass.getpass("Confirm password: ")
    profile = SignupRequest(
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        phone=args.phone,
        password=password,
    )
    storefront.sessions.signup(profile, confirm_password=confirm)
    print("Account created successfully! Please login.")


def cmd_logout(storefront: Storefront, args) -> None:
    storefront.sessions.logout()
    print("Logged out successfully")


def cmd_whoami(storefront: Storefront, args) -> None:
    session = storefront.sessions.session
    if session is None:
        print("Not signed in")
        return
    print(f"{session.display_name} ({session.user_id})")


def cmd_products(storefront: Storefront, args) -> None:
    if args.search:
        products = storefront.catalogue.search(args.search)
    else:
        products = storefront.catalogue.list_products()

    if not products:
        print("No products found")
        return
    for product in products:
        print(f"  {product.product_id}  {product.product_name}  ${product.price:.2f}  ({product.rating:g}/5)")


def cmd_cart(storefront: Storefront, args) -> None:
    _print_cart(storefront.cart.refresh())


def cmd_add(storefront: Storefront, args) -> None:
    storefront.cart.add_item(args.product_id)
    print("Item added to cart!")
    _print_cart(storefront.cart.cart)


def cmd_remove(storefront: Storefront, args) -> None:
    cart = storefront.cart.remove_item(args.product_id)
    print("Item removed from cart!")
    _print_cart(cart)


def cmd_quantity(storefront: Storefront, args) -> None:
    cart = storefront.cart.change_quantity(args.product_id, args.quantity)
    print("Item removed from cart!")
    _print_cart(cart)


def cmd_buy(storefront: Storefront, args) -> None:
    storefront.checkout.instant_buy(args.product_id)
    print("Order placed successfully!")


def cmd_place_order(storefront: Storefront, args) -> None:
    storefront.cart.refresh()
    storefront.cart.checkout()
    print("Order placed successfully!")


def cmd_checkout(storefront: Storefront, args) -> None:
    form = CheckoutForm(
        email=args.email or (storefront.sessions.session.email if storefront.sessions.session else ""),
        phone=args.phone,
        street=args.street,
        city=args.city,
        state=args.state,
        zip_code=args.zip_code,
        country=args.country,
        card_number=format_card_number(args.card_number),
        expiry_date=format_expiry_date(args.expiry),
        cvv=args.cvv,
        cardholder_name=args.cardholder_name,
    )
    # Validate before touching the network
    storefront.checkout.validate(form, args.saved_address_id)
    storefront.cart.refresh()

    try:
        receipt = storefront.checkout.submit(form, saved_address_id=args.saved_address_id)
    except ValidationError:
        raise
    except StorefrontError as exc:
        raise StorefrontError(f"Checkout failed: {exc.message}") from exc

    print("Order placed successfully!")
    print(f"Charged ${receipt.display_total:.2f} for {receipt.line_count} item(s)")
    if receipt.transaction_id:
        print(f"Transaction: {receipt.transaction_id}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description="Storefront client")
    parser.add_argument("--env-file", help="Read settings from this .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    login_parser = subparsers.add_parser("login", help="Sign in")
    login_parser.add_argument("--email", required=True)
    login_parser.add_argument("--password", help="Prompted for when omitted")
    login_parser.set_defaults(func=cmd_login)

    signup_parser = subparsers.add_parser("signup", help="Create an account")
    signup_parser.add_argument("--first-name", required=True)
    signup_parser.add_argument("--last-name", required=True)
    signup_parser.add_argument("--email", required=True)
    signup_parser.add_argument("--phone", required=True)
    signup_parser.add_argument("--password", help="Prompted for (twice) when omitted")
    signup_parser.set_defaults(func=cmd_signup)

    subparsers.add_parser("logout", help="Sign out").set_defaults(func=cmd_logout)
    subparsers.add_parser("whoami", help="Show the signed-in visitor").set_defaults(func=cmd_whoami)

    products_parser = subparsers.add_parser("products", help="List or search products")
    products_parser.add_argument("--search", help="Product name to search for")
    products_parser.set_defaults(func=cmd_products)

    subparsers.add_parser("cart", help="Show the cart").set_defaults(func=cmd_cart)

    add_parser = subparsers.add_parser("add", help="Add a product to the cart")
    add_parser.add_argument("product_id")
    add_parser.set_defaults(func=cmd_add)

    remove_parser = subparsers.add_parser("remove", help="Remove a product from the cart")
    remove_parser.add_argument("product_id")
    remove_parser.set_defaults(func=cmd_remove)

    quantity_parser = subparsers.add_parser("quantity", help="Change a line's quantity")
    quantity_parser.add_argument("product_id")
    quantity_parser.add_argument("quantity", type=int)
    quantity_parser.set_defaults(func=cmd_quantity)

    buy_parser = subparsers.add_parser("buy", help="Buy one product now, bypassing the cart")
    buy_parser.add_argument("product_id")
    buy_parser.set_defaults(func=cmd_buy)

    subparsers.add_parser("place-order", help="Place a server-side order for the whole cart").set_defaults(
        func=cmd_place_order
    )

    checkout_parser = subparsers.add_parser("checkout", help="Check out with shipping and card details")
    checkout_parser.add_argument("--email", default="")
    checkout_parser.add_argument("--phone", default="")
    checkout_parser.add_argument("--street", default="")
    checkout_parser.add_argument("--city", default="")
    checkout_parser.add_argument("--state", default="")
    checkout_parser.add_argument("--zip-code", default="")
    checkout_parser.add_argument("--country", default="United States")
    checkout_parser.add_argument("--saved-address-id", help="Ship to a saved address instead")
    checkout_parser.add_argument("--card-number", default="")
    checkout_parser.add_argument("--expiry", default="", help="MM/YY")
    checkout_parser.add_argument("--cvv", default="")
    checkout_parser.add_argument("--cardholder-name", default="")
    checkout_parser.set_defaults(func=cmd_checkout)

    return parser


def main(argv=None, storefront: Storefront | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if storefront is None:
        try:
            settings = load_settings(args.env_file)
        except ConfigError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        configure_logging(settings.log_level)
        storefront = create_storefront(settings)

    add_context(command=args.command)
    try:
        storefront.sessions.restore()
        args.func(storefront, args)
    except ValidationError as exc:
        for field, message in exc.errors.items():
            print(f"{field}: {message}", file=sys.stderr)
        return 2
    except StorefrontError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    finally:
        clear_context()
    return 0


if __name__ == "__main__":
    sys.exit(main())
