"""Catalog administration: adding products."""

from protean import handle
from protean.fields import Boolean, Float, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=100)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0)
    category: String(required=True, max_length=50)
    stock: Integer(min_value=0, default=0)
    image: String(max_length=500)
    featured: Boolean(default=False)


@storefront.command_handler(part_of=Product)
class AddProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            stock=command.stock,
            image=command.image,
            featured=command.featured,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)
