COOKIE_SESSION_PRODUCT_SEARCH_QUERY = """
query productSearch(
  $query: String
  $fullText: String
  $selectedFacets: [SelectedFacetInput]
  $priceRange: String
  $orderBy: String
  $from: Int
  $to: Int
  $hideUnavailableItems: Boolean
  $skusFilter: ItemsFilter
  $installmentCriteria: InstallmentsCriteria
) {
  productSearch(
    query: $query
    fullText: $fullText
    selectedFacets: $selectedFacets
    priceRange: $priceRange
    orderBy: $orderBy
    from: $from
    to: $to
    hideUnavailableItems: $hideUnavailableItems
    skusFilter: $skusFilter
    installmentCriteria: $installmentCriteria
  ) @context(provider: "vtex.search-graphql") {
    recordsFiltered
    products {
      productId
      productName
      description
      link
      linkText
      items {
        itemId
        images { imageUrl }
        sellers {
          sellerId
          sellerDefault
          commertialOffer { Price ListPrice AvailableQuantity }
        }
      }
    }
  }
}
"""

COOKIE_SESSION_PRODUCT_DETAIL_QUERY = """
query product($slug: String) {
  product(slug: $slug) @context(provider: "vtex.search-graphql") {
    productId
    productName
    description
    linkText
    items {
      itemId
      images { imageUrl }
      sellers {
        sellerId
        sellerDefault
        commertialOffer { Price ListPrice AvailableQuantity }
      }
    }
  }
}
"""

HEADER_TOKEN_PRODUCTS_QUERY = """
query products($first: Int!, $query: String, $after: String) {
  products(first: $first, query: $query, after: $after) {
    edges {
      cursor
      node {
        id
        title
        description
        handle
        images(first: 10) { edges { node { url } } }
        variants(first: 1) {
          edges {
            node {
              price { amount }
              compareAtPrice { amount }
              availableForSale
              quantityAvailable
            }
          }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

HEADER_TOKEN_PRODUCT_DETAIL_QUERY = """
query product($handle: String!) {
  product(handle: $handle) {
    id
    title
    description
    handle
    images(first: 20) { edges { node { url } } }
    variants(first: 1) {
      edges {
        node {
          price { amount }
          compareAtPrice { amount }
          availableForSale
          quantityAvailable
        }
      }
    }
  }
}
"""
