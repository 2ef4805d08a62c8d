"""Storage-free building blocks shared by the services: the cart aggregate and
the order status machine."""
